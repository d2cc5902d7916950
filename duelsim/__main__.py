from duelsim.main import main

raise SystemExit(main())
