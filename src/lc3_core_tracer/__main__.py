import sys

from lc3_core_tracer.cli import main

sys.exit(main())
