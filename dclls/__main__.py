from dclls.main import main

main()
