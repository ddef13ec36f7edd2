from imapnotify.cli.notify_once import main

raise SystemExit(main())
