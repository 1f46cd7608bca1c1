"""Allow ``python -m zettel_cli``."""
import sys

from zettel_cli.main import main

sys.exit(main())
