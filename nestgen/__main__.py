"""Allow ``python -m nestgen``."""

from nestgen.cli import main

if __name__ == "__main__":
    main()
