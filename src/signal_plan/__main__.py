from signal_plan.cli.app import main

main()
