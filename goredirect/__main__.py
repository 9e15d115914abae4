from goredirect.cli import main

raise SystemExit(main())
