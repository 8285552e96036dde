import sys

from fuzzsmt.cli import main

sys.exit(main())
