from formidable_scaffold.cli import main

main()
