"""Run with: python -m polyscene"""
from polyscene.main import main

if __name__ == "__main__":
    main()
