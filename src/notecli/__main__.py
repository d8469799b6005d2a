import sys
from notecli.cli import main

sys.exit(main())
