from code_to_prompt.cli import main

raise SystemExit(main())
