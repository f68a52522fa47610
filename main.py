"""
Entry point for Bloggen.
Delegates to bloggen.main.
"""
import sys

from bloggen.main import main

if __name__ == "__main__":
    sys.exit(main())
