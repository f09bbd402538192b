import sys

from mathrepl.repl import main

if __name__ == "__main__":
    sys.exit(main())
