import sys

from faceverify.cli import main

sys.exit(main())
