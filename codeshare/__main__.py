import sys

from codeshare.cli import main

sys.exit(main())
