import sys

from soundscope.cli import main

sys.exit(main())
