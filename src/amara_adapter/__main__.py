import sys

from amara_adapter.cli import main

sys.exit(main())
