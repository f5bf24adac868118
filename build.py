#!/usr/bin/env python3
from gdsite.cli import main

if __name__ == "__main__":
    main()
