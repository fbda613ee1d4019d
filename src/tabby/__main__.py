from tabby._cli import main

main()
