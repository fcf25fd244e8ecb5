#!/usr/bin/env python
"""CLI for searching a MISP instance."""

from misp_search.cli import main

if __name__ == "__main__":
    main()
