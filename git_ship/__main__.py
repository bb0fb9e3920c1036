from git_ship.cli import main

raise SystemExit(main())
