import sys

from surftray.cli import main

sys.exit(main())
