from todo64.main import main

main()
