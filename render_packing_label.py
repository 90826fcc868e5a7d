#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Render packing label PDFs for one order.
"""

# local repo modules
import packing_label_engine.cli


if __name__ == "__main__":
	packing_label_engine.cli.main()
