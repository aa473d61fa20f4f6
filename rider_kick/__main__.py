from rider_kick.cli import main

main()
