import sys

from servicebus_demo.app import main

sys.exit(main())
