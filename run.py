#!/usr/bin/env python3
"""
WORM Uploader

Create a bucket with Object Lock enabled, upload a file into it with a
COMPLIANCE retention lock (1 day) and verify the result.

Usage:
    python run.py -b BUCKET -f FILENAME         # Upload FILENAME into BUCKET
    python run.py -b BUCKET -f FILE -k KEY      # Use a different object key
    python run.py -b BUCKET -f FILE -r eu-west-1
    python run.py -b BUCKET -f FILE --endpoint-url http://localhost:9000
    python run.py -b BUCKET -f FILE -v          # Log storage calls
"""

import sys
from worm_upload.cli import main

if __name__ == "__main__":
    sys.exit(main())
