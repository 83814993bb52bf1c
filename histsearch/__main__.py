from histsearch.cli import main

raise SystemExit(main())
