from rngrename.cli import main

main()
