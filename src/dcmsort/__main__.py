from dcmsort.cli.dicomsort import dicomsort

if __name__ == "__main__":
    dicomsort(prog_name="dcmsort")
