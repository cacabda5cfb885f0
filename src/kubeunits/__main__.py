from kubeunits.cli import main

main()
