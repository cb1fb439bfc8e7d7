"""Allow ``python -m mocap_bvh``."""

import sys

from mocap_bvh.cli import main

sys.exit(main())
