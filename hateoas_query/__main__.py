from __future__ import annotations

from hateoas_query.cli import main

if __name__ == "__main__":
    main()
