import sys

from prediction_provisioner.cli import main

sys.exit(main())
