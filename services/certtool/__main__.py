import sys

from certtool.cli import main

sys.exit(main())
