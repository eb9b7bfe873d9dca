from keystone_e2e.cli import main

main()
