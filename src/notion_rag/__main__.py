from notion_rag.cli import main

raise SystemExit(main())
