from sshmgr.cli import main

main()
