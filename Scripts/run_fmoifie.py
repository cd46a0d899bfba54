import os
import sys
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))
from fmoifie.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
