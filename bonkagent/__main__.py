"""Allow running the backend as a module: python -m bonkagent."""

from bonkagent.runner import main

if __name__ == "__main__":
    main()
