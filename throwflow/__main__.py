# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import sys

from throwflow.driver import main

sys.exit(main())
