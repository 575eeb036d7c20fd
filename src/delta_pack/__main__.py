from delta_pack.cli import main

raise SystemExit(main())
