"""Red Light, Green Light entry point.

Run from the project root:
    python -m redlight

Or, once installed:
    redlight --players 3 --rounds 5
"""

from redlight.main import main


if __name__ == "__main__":
    main()
