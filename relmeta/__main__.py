from relmeta.cli.app import main

main()
