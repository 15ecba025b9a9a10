"""Allow ``python -m stackforge``."""
import sys

from stackforge.cli._dispatcher import main

sys.exit(main())
