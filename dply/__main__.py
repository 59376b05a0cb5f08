from dply.cli.app import main

main()
