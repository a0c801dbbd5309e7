from playwright_bridge.cli import main

main()
