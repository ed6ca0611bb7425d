from tracii.cli import main

main()
