import sys

from worm_upload.cli import main

sys.exit(main())
