import sys

from .scanner import main

sys.exit(main())
