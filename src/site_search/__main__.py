from site_search.cli import main


raise SystemExit(main())
