from zcb_player.main import main

if __name__ == "__main__":
    main()
