import sys

from diffpreview.cli import main

sys.exit(main())
