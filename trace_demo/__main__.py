import sys

from trace_demo.commands.trace_demo_run import main


sys.exit(main())
