from swaprelay.main import main

main()
