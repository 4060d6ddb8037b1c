import sys

from .self_play import main

sys.exit(main())
