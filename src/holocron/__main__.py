"""Entry point: python -m holocron [learn|link|init|config]"""

from holocron.cli import main

if __name__ == "__main__":
    main(prog_name="holocron")
