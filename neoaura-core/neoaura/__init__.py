name = "neoaura"
