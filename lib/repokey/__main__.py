from repokey.cli import main

main(prog_name='repokey')
