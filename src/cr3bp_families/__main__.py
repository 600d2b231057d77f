from cr3bp_families.main import main

raise SystemExit(main())
