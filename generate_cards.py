#!/usr/bin/env python3
"""Entry point wrapper for the card generator."""

from cardsmith import main

if __name__ == "__main__":
    main()
