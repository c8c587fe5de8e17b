"""Stop ranking, nearest-stop selection and discovery."""
