from chatfn.conversation import main

main()
