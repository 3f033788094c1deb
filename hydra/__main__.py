from hydra.main import main

main()
