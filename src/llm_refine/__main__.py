"""Allow ``python -m llm_refine``."""

import sys

from .cli import main

sys.exit(main())
