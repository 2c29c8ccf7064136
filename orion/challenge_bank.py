CHALLENGE_TEMPLATES = {
    "javascript": {
        "fix_bug": [
            {
                "title": "Off By One Sum",
                "prompt": "Fix the bug in this function that should calculate the sum of all numbers in an array.",
                "code_snippet": """function sumArray(arr) {
  let sum = 0;
  for (let i = 1; i < arr.length; i++) {
    sum += arr[i];
  }
  return sum;
}""",
                "correct_answer": """function sumArray(arr) {
  let sum = 0;
  for (let i = 0; i < arr.length; i++) {
    sum += arr[i];
  }
  return sum;
}""",
                "hints": [
                    "Check the loop initialization carefully.",
                    "Make sure the loop processes all elements in the array.",
                    "The loop should start from the first element (index 0).",
                ],
                "explanation": "The loop started at i = 1, skipping the first element. "
                "Array indices start at 0, so the loop must start there to visit every element.",
            },
        ],
        "complete_code": [
            {
                "title": "Find The Maximum",
                "prompt": "Complete the function to find the maximum value in an array of numbers.",
                "code_snippet": """function findMax(arr) {
  // Your code here
}""",
                "correct_answer": """function findMax(arr) {
  if (arr.length === 0) return null;
  let max = arr[0];
  for (let i = 1; i < arr.length; i++) {
    if (arr[i] > max) {
      max = arr[i];
    }
  }
  return max;
}""",
                "hints": [
                    "Initialize a variable to track the maximum value.",
                    "Loop through the array and compare each element with the current maximum.",
                    "Don't forget to handle the case of an empty array.",
                ],
                "explanation": "Start with the first element as the maximum, then walk the rest of the "
                "array replacing it whenever a larger value appears. An empty array returns null.",
            },
        ],
        "explain_output": [
            {
                "title": "Temporal Dead Zone",
                "prompt": "What will be the output of the following code?",
                "code_snippet": """let x = 10;
function foo() {
  console.log(x);
  let x = 20;
}
foo();""",
                "correct_answer": "ReferenceError: Cannot access 'x' before initialization",
                "hints": [
                    "Think about variable hoisting in JavaScript.",
                    "Consider the scope of the variable x inside the function.",
                    "What happens when you read a let variable before its declaration?",
                ],
                "explanation": "The inner let x is hoisted but not initialized, so reading it before the "
                "declaration throws a ReferenceError even though a global x exists.",
            },
        ],
        "predict_outcome": [
            {
                "title": "Const Reassignment",
                "prompt": "What happens when this code runs?",
                "code_snippet": """const total = 5;
total = total + 1;
console.log(total);""",
                "correct_answer": "TypeError: Assignment to constant variable.",
                "hints": [
                    "Look at how total is declared.",
                    "Can a const binding be reassigned?",
                ],
                "explanation": "Bindings declared with const cannot be reassigned, so the second line "
                "throws a TypeError before anything is logged.",
            },
        ],
    },
    "python": {
        "fix_bug": [
            {
                "title": "Endless Factorial",
                "prompt": "Fix the bug in this function that should return the factorial of a number.",
                "code_snippet": """def factorial(n):
    if n == 0:
        return 1
    return n * factorial(n)""",
                "correct_answer": """def factorial(n):
    if n == 0:
        return 1
    return n * factorial(n - 1)""",
                "hints": [
                    "Look at the recursive call carefully.",
                    "What should change in each recursive call to reach the base case?",
                    "The function needs to eventually reach n = 0.",
                ],
                "explanation": "The recursive call passed n instead of n - 1, so the base case was never "
                "reached and the function recursed until the stack overflowed.",
            },
        ],
        "complete_code": [
            {
                "title": "Palindrome Check",
                "prompt": "Complete the function to check if a string is a palindrome.",
                "code_snippet": """def is_palindrome(s):
    # Your code here""",
                "correct_answer": """def is_palindrome(s):
    s = s.lower().replace(" ", "")
    return s == s[::-1]""",
                "hints": [
                    "Normalize the string first (spaces, case).",
                    "Compare the string with its reverse.",
                    "Slicing with a step of -1 reverses a string.",
                ],
                "explanation": "Lower-case the string and drop spaces, then compare it with s[::-1].",
            },
        ],
        "explain_output": [
            {
                "title": "Mutable Default",
                "prompt": "What will be the output of this code?",
                "code_snippet": """def append_to(item, bucket=[]):
    bucket.append(item)
    return bucket

append_to(1)
print(append_to(2))""",
                "correct_answer": "[1, 2]",
                "hints": [
                    "When is a default argument evaluated?",
                    "The same list object is shared between calls.",
                ],
                "explanation": "Default values are evaluated once at definition time, so both calls "
                "append to the same list.",
            },
        ],
        "identify_pattern": [
            {
                "title": "Name That Search",
                "prompt": "What pattern or algorithm does this code implement?",
                "code_snippet": """def find(items, target):
    lo, hi = 0, len(items) - 1
    while lo <= hi:
        mid = (lo + hi) // 2
        if items[mid] == target:
            return mid
        if items[mid] < target:
            lo = mid + 1
        else:
            hi = mid - 1
    return -1""",
                "correct_answer": "Binary search",
                "hints": [
                    "The search space halves every iteration.",
                    "It only works on sorted input.",
                ],
                "explanation": "The loop repeatedly halves a sorted range around the midpoint: binary search.",
            },
        ],
    },
}
