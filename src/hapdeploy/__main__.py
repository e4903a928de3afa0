from hapdeploy import main

main()
